"""Personal job application tracker."""
