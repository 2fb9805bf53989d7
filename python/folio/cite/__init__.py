from folio.cite.bibtex import BibtexPublicationDB

__all__ = ["BibtexPublicationDB"]
