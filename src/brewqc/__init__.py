"""
BrewQC - Brewery Quality Control Service

Quality assessment for brewery production batches:
- Manual and automated quality checks
- Per-batch quality scoring
- Pass/fail trend analysis
- Inspection checklists and templates
"""

__version__ = "0.1.0"
__author__ = "BrewQC Team"
