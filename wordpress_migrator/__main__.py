#!/usr/bin/env python3
"""
Main execution module for the WordPress content migration tool
"""

from wordpress_migrator.cli.commands import main

if __name__ == "__main__":
    main()
