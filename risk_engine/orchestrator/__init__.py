"""Analytics run coordination and case lifecycle management"""
