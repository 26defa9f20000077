"""Route output serializers."""
