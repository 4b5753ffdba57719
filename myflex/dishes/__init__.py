"""
Dish catalog.

Responsibilities:
- Define the canonical Dish schema shared by admin CRUD and the AI flows.
- Seed the catalog from the bundled CSV and bulk-import admin CSV files.
- Score dishes against a user's origin, country and virtual profile.
"""
