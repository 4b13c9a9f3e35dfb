"""Scheduling domain - Time slot availability for bookable services"""
