from .page_fetcher import PageFetcher, extract_text, strip_html

__all__ = ['PageFetcher', 'extract_text', 'strip_html']
