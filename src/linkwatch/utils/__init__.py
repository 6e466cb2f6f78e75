"""Utility modules and functions"""
