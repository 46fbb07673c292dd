from .client import MediaWikiClient
