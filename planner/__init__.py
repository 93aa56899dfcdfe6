"""Daily planner task engine"""
