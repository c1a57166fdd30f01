"""Host adapters driving the guide engine from UI toolkits."""
