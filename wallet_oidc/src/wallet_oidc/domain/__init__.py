"""Domain layer - protocol models, errors and pure flow logic"""
