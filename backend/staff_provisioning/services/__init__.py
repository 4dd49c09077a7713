"""Services Layer — orchestrates core policy around backend IO."""
