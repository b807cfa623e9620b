from typing import List

from ..base import PipelineStage
from ...core.exceptions import RefreshError
from ...core.models import Asset
from ...utils.batching import chunk
from ...utils.name_filter import passes


# Maximum number of URLs the CDN accepts in one refresh call
MAX_REFRESH_BATCH = 100


class RefreshStage(PipelineStage):
    """Invalidates CDN caches for changed assets"""

    def __init__(self, options, backend, progress_manager=None, logger=None,
                 max_batch_size: int = MAX_REFRESH_BATCH):
        super().__init__("refresh", options, backend=backend, progress_manager=progress_manager, logger=logger)
        self.max_batch_size = max_batch_size

    @property
    def enabled(self) -> bool:
        return self.options.refresh

    def build_urls(self, assets: List[Asset]) -> List[str]:
        """Public URLs of the assets that pass the refresh filters"""
        return [
            self.options.public_url(self.options.remote_key(asset.name))
            for asset in assets
            if passes(asset.name, self.options.refresh_filters, keep_on_match=True)
        ]

    async def refresh_changed(self, assets: List[Asset]) -> List[str]:
        """
        Refresh CDN URLs in batches.

        Returns:
            URLs that were refreshed

        Raises:
            RefreshError: On the first batch that is not acknowledged.
                Earlier batches stay refreshed.
        """
        urls = self.build_urls(assets)
        self.logger.info(f"{len(urls)} files need to refresh")
        if not urls:
            return []

        refreshed: List[str] = []
        batches = chunk(urls, self.max_batch_size)
        for index, batch in enumerate(batches, start=1):
            response = await self.backend.refresh_urls(batch)

            if response.transport_failed:
                raise RefreshError(f"Refresh batch {index}/{len(batches)} failed: {response.error}")
            if response.status_code != 200 or not self._acknowledged(response.body):
                raise RefreshError(
                    f"Refresh batch {index}/{len(batches)} not acknowledged: {response.describe()}",
                    status_code=response.status_code,
                    body=response.body
                )

            refreshed.extend(batch)
            self._update_progress(refreshed_urls=len(batch))
            self.logger.debug(f"Refresh batch {index}/{len(batches)} done ({len(batch)} urls)")

        return refreshed

    @staticmethod
    def _acknowledged(body) -> bool:
        if not isinstance(body, dict):
            return False
        return body.get('code') == 200 or body.get('error') == 'success'
