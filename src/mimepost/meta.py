"""Package metadata for mimepost."""

__app_name__ = "mimepost"
__version__ = "0.1.0"
__description__ = "Compose multipart MIME email and deliver it over SMTP."
__author__ = "mimepost contributors"
__license_type__ = "MIT"

__all__ = [
    "__app_name__",
    "__author__",
    "__description__",
    "__license_type__",
    "__version__",
]
