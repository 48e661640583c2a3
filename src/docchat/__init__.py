"""docchat — retrieval-augmented question answering over user documents."""
