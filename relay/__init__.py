"""Relay de webhooks do Alertmanager -> Discord/Slack.

Este pacote contém:
- constants: variáveis de ambiente e limites das plataformas
- config: carga das rotas (slug -> webhook) a partir do YAML
- logging_setup: logging JSON com mascaramento dos tokens de webhook
- tokens / lexer: árvore de tokens markdown (via mistune)
- block_kit: construtores e validação do Block Kit do Slack
- markdown_to_rich: compilador markdown -> rich_text
- slack_helpers: menções, tabelas e conversões mrkdwn
- handlers_*: montagem e envio das mensagens por plataforma
- services: POST nos webhooks
- controller: criação do Flask app e endpoints
"""
