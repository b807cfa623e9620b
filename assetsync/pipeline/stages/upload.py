import asyncio
from dataclasses import dataclass, field
from typing import Dict, List

from ..base import PipelineStage
from ...core.exceptions import UploadError
from ...core.models import Asset


@dataclass
class UploadReport:
    uploaded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)


class UploadStage(PipelineStage):
    """Uploads changed assets with bounded concurrency"""

    def __init__(self, options, backend, progress_manager=None, logger=None):
        super().__init__("upload", options, backend=backend, progress_manager=progress_manager, logger=logger)
        self.max_concurrency = options.max_concurrency

    async def upload_all(self, assets: List[Asset]) -> UploadReport:
        """
        Upload every asset, at most max_concurrency at a time.

        A failed file does not stop its siblings. Once every upload has
        finished, UploadError is raised if any of them failed.
        """
        report = UploadReport()
        if not assets:
            self.logger.info("0 files need to upload")
            return report

        self.logger.info(f"{len(assets)} files need to upload")
        self._update_progress(total_uploads=len(assets))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def upload_one(asset: Asset):
            key = self.options.remote_key(asset.name)
            async with semaphore:
                try:
                    response = await self.backend.put_object(key, asset.local_path)
                except Exception as e:
                    error = f"upload raised {e}"
                else:
                    if response.transport_failed:
                        error = response.error
                    elif response.status_code != 200:
                        error = f"upload rejected: {response.describe()}"
                    else:
                        error = None

            if error is None:
                report.uploaded.append(key)
                self.logger.debug(f"Uploaded {key}")
            else:
                report.failed[key] = error
                self.logger.error(f"{key}: upload failed: {error}")
            if self.progress_manager:
                self.progress_manager.upload_completed(failed=error is not None)

        await asyncio.gather(*[upload_one(asset) for asset in assets])

        # Report keys in input order regardless of completion order
        order = {self.options.remote_key(a.name): i for i, a in enumerate(assets)}
        report.uploaded.sort(key=order.__getitem__)

        if report.failed:
            raise UploadError(report.failed, uploaded=report.uploaded)

        self.logger.info(f"Uploaded {len(report.uploaded)} files")
        return report
