"""Request validation core: predicates, blocklists, normalization and the strict firewall."""
