# Infrastructure Catalog Adapters Package
from .bundled import BundledCatalog
from .remote import RemoteCatalog

__all__ = ["BundledCatalog", "RemoteCatalog"]
