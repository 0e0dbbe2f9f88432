"""Record Vault: a small persistent store of named text records."""
