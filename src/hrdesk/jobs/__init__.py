"""Background job implementations executed by the rq worker."""
