from .credentials import CredentialResolver
from .fetcher import ArtifactDownload, ArtifactFetcher

__all__ = ["ArtifactDownload", "ArtifactFetcher", "CredentialResolver"]
