"""Console interface for the budget tracker."""
