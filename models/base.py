"""错误码与用户可见消息"""


# 错误码定义
class ErrorCode:
    """错误码常量"""

    # 配置错误 (400-499)
    CONFIG_NOT_FOUND = 404
    CONFIG_PARSE_ERROR = 421
    VALIDATION_ERROR = 422

    # 服务/系统错误 (500-599)
    INTERNAL_ERROR = 500
    CONFIG_READ_ERROR = 501
    SERVICE_UNAVAILABLE = 503

    # 业务错误 (600+)
    IMAGE_GENERATE_FAILED = 601
    IMAGE_SAVE_FAILED = 602


# 用户可见消息（面向日文用户）
class ErrorMessage:
    """消息常量"""
    # 配置文件
    CONFIG_NOT_FOUND = "設定ファイルが見つかりません"
    CONFIG_PARSE_ERROR = "JSONファイルの解析に失敗しました"
    CONFIG_READ_ERROR = "ファイル読み込みに失敗しました"
    CONFIG_VALIDATION_ERROR = "設定ファイルの検証に失敗しました"
    CONFIG_NOT_ARRAY = "設定ファイルは配列形式である必要があります"
    PROMPT_NOT_OBJECT = "プロンプト{index}は辞書形式である必要があります"
    PROMPT_MISSING = "プロンプト{index}にpromptが設定されていません"
    NEGATIVE_PROMPT_NOT_STRING = "プロンプト{index}のnegative_promptは文字列である必要があります"
    PARAMS_NOT_OBJECT = "プロンプト{index}のparamsは辞書形式である必要があります"

    # WebUI
    SERVICE_UNAVAILABLE = "Stable Diffusion WebUI APIに接続できません"
    SERVICE_HINT = "WebUIが起動していることを確認してください"
    IMAGE_GENERATE_FAILED = "画像生成に失敗しました"
    IMAGE_SAVE_FAILED = "画像保存に失敗しました"
