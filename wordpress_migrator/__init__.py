#!/usr/bin/env python3
"""
WordPress to CMS content migration tool
"""

__version__ = "0.1.0"

from wordpress_migrator.core.config import ImportConfig, load_config
from wordpress_migrator.core.mapping_cache import MappingCache, load_cache, save_cache

# Import the main classes and functions for easier access
from wordpress_migrator.core.pipeline import ImportPipeline, prepare_context
from wordpress_migrator.core.scanner import XmlStreamScanner, scan
from wordpress_migrator.core.transform import clean_content, extract_alias

# Boundary for host integrations
from wordpress_migrator.services.target_store import TargetStore
