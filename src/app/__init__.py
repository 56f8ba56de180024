"""App — coração do sistema: orquestração, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: eventos normalizados, receipts e documentos canônicos
- use_cases/: ingestão do pipeline e caminho de leitura
- services/: ledger, throttle, upsert canônico, projeção e notificação
- infra/: implementações concretas de IO (stores, tracker, mail)
- protocols/: contratos/interfaces
- observability/: correlation_id e contadores

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
