"""SQL text helpers: statement classification, dialects and UPDATE emission."""
