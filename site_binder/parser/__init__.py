# File: site_binder/parser/__init__.py
"""site_binder.parser: Разбор sitemap.xml и HTML."""
