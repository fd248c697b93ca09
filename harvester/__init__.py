"""PDF harvester: search-page crawl, link extraction and PDF download."""
