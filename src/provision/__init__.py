"""PyPy provisioning: manifest matching, tool cache lookup and installation."""
