"""Release domain: matrix expansion, caching, staging, archiving, publishing."""
