"""
コア機能

データモデル、設定、エラー、ロギング、カタログ、ファサード
"""
