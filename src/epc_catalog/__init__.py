"""
EPC Catalog - parts-catalogue assembly engine

Provides the data-entry core behind the parts-catalogue admin tool:
- Cascading, paginated selectors over remote option lists
- CSV import of part items with all-or-nothing validation
- Catalog document drafting, validation and submission
- VIN product records linked to catalog documents
"""

__version__ = "0.1.0"
