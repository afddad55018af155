"""CLI tools for graphfs."""
