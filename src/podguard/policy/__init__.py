"""Policy synthesis — aggregation, document models, synthesizers and serializers."""
