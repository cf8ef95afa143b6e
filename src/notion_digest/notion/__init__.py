"""Notion database access, property mapping and batch submission."""
