"""Stable Diffusion WebUI 适配器"""
