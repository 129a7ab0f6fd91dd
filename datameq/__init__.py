"""
DataMeq - Shared line pools with per-user quotas.

Two FIFO pools of text lines (data1, data2) are handed out to users on
request. Every line goes to at most one user, each user draws within a
quota, and every allocation lands in a bounded shared activity log.
"""
__version__ = "1.0.0"
