"""Command line interface for the Hifz tracker."""
