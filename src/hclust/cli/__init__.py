"""Command-line interface for hclust."""
