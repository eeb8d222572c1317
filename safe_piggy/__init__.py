"""Command-line entry point for the Safe Piggy expense tracker."""
