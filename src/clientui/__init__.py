"""Server-rendered client with failure classification and page recovery."""
