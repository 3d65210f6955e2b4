#!/usr/bin/env python
"""CLI entry point for density view dataset generator."""

from density_view_generator.pipeline import main

if __name__ == "__main__":
    main()
