import hashlib

import aiofiles


class HashCalculator:
    """Calculate content digests for local files"""

    CHUNK_SIZE = 64 * 1024

    @staticmethod
    async def calculate_file_hash(local_path: str, chunk_size: int = CHUNK_SIZE) -> str:
        """Stream the file through MD5 and return the hex digest.

        Raises OSError if the file cannot be opened or read.
        """
        content_hash = hashlib.md5()
        async with aiofiles.open(local_path, "rb") as f:
            while True:
                chunk = await f.read(chunk_size)
                if not chunk:
                    break
                content_hash.update(chunk)
        return content_hash.hexdigest()

    @staticmethod
    def calculate_bytes_hash(data: bytes) -> str:
        """Digest of an in-memory payload, same algorithm as calculate_file_hash"""
        return hashlib.md5(data).hexdigest()
