"""VidTube: composed read views and toggle relations for a video platform backend."""
