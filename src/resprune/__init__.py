"""Find and safely remove unused Android resources."""
