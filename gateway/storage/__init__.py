from .s3 import S3Storage, StorageCredentials

__all__ = ["S3Storage", "StorageCredentials"]
