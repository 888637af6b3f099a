"""
Core application engine for orchestrating the download process.

The `DownloadManager` resolves the requested videos or manifest, selects what
to fetch, and hands the URLs to the retrieval engine.
"""
