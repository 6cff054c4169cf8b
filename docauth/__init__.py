"""docauth: in-process fallback identity provider for the document analyzer."""

__version__ = "0.1.0"
