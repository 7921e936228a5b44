"""
Test suite for the Fuzzy Racing Line Simulation.

This package contains unit tests organized by component:
- test_params.py: Tests for parameter validation and derived values
- test_membership.py: Tests for membership functions
- test_fis_format.py: Tests for the .fis parser
- test_inference.py: Tests for Mamdani and Sugeno evaluation
- test_engines.py: Tests for engine loading, readiness and selection
- test_reference.py: Tests for the reference line drivers
- test_normalizer.py: Tests for controller input normalisation
- test_steering.py: Tests for steering limits and heading geometry
- test_dynamics.py: Tests for vehicle kinematics
- test_simulation.py: Tests for the control loop and fault handling
- test_tracking_analysis.py: Tests for tracking analysis
- test_integration.py: Integration tests for engine comparison runs
"""
