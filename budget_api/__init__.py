"""Flask REST API for the budget tracker."""
