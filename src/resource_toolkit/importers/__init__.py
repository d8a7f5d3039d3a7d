"""
Batch processors (one per CSV import) and the link cleanup scan.
"""

from .attachment_importer import AttachmentImporter
from .link_cleanup import CleanupReport, cleanup_empty_links
from .resource_importer import ResourceImporter
from .taxonomy_assigner import TaxonomyAssigner

__all__ = [
    "AttachmentImporter",
    "CleanupReport",
    "ResourceImporter",
    "TaxonomyAssigner",
    "cleanup_empty_links",
]
