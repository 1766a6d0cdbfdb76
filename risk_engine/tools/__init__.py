"""Aggregation, anomaly detection, classification and ranking tools"""
