"""mdserve - serve a directory of markdown documents as HTML pages."""
