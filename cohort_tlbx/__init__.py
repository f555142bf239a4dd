"""Cohort analysis toolbox: preprocessing, 2D projections and linked subgroup views."""
