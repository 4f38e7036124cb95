"""User store implementation over a document session."""
