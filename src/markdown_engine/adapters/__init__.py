"""Host adapters binding the engine to concrete UI toolkits."""
