"""Persistence adapters"""
