"""warcstream - WARC record codec and command-line tools."""
