"""Tech and finance news aggregation with short AI summaries."""
