"""REST API for the Hifz tracker."""
