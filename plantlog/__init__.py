"""Plantlog - houseplant watering tracker."""
