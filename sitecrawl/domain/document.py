from typing import Optional

from bs4 import BeautifulSoup


class Document:
    """A fetched page: where it came from plus its parsed HTML tree.

    Documents hash by identity, so two fetches of equal HTML are still two
    separate items in the mailbox.
    """

    def __init__(self, url: str, soup: BeautifulSoup, status_code: Optional[int] = None):
        self.url = url
        self.soup = soup
        self.status_code = status_code

    @classmethod
    def from_html(cls, url: str, html: str, status_code: Optional[int] = None) -> "Document":
        return cls(url, BeautifulSoup(html, "html.parser"), status_code=status_code)

    def __repr__(self):
        return f"<Document url={self.url} status={self.status_code}>"
