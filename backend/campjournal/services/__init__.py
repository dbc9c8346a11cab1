"""Service layer: async functions issuing queries against the store."""
