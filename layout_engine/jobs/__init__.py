"""Background job primitives for course layout generation."""
