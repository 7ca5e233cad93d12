"""Services package - moderation logic over the catalog."""
